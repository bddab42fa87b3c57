"""
Schemas Pydantic per il progetto Materials Ledger

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from app.schemas import ClientRead, ConsumptionCreate, etc.

from app.schemas.client import ClientCreate, ClientList, ClientRead, ClientUpdate
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.schemas.pricing import (
    BulkUpdateResult,
    CategoryPriceBulkItem,
    CategoryPriceBulkUpdate,
    CategoryPriceRead,
    CategoryPriceUpdate,
    CategoryPriceUpsert,
    CategoryProductPrice,
    ClientPriceAssignmentRead,
    ClientPriceAssignmentUpsert,
    ClientPriceRead,
    ClientPriceUpsert,
    GeneralPriceRead,
    GeneralPriceUpsert,
    PriceCategoryCreate,
    PriceCategoryRead,
    PriceCategoryUpdate,
    PriceSource,
    ResolvedPrice,
    ResolvedPriceRead,
)
from app.schemas.consumption import (
    ConsumptionCreate,
    ConsumptionDayRow,
    ConsumptionRead,
    SequenceNumberRead,
)
from app.schemas.payment import (
    PaymentCreate,
    PaymentRead,
    PaymentReportRow,
    PaymentTypeRead,
)
from app.schemas.report import (
    BalanceStatus,
    ClientSummary,
    ConsumptionReport,
    ConsumptionReportRow,
    ReportGroupBy,
)

__all__ = [
    # Client
    "ClientCreate",
    "ClientList",
    "ClientRead",
    "ClientUpdate",
    # Product
    "ProductCreate",
    "ProductRead",
    "ProductUpdate",
    # Pricing
    "BulkUpdateResult",
    "CategoryPriceBulkItem",
    "CategoryPriceBulkUpdate",
    "CategoryPriceRead",
    "CategoryPriceUpdate",
    "CategoryPriceUpsert",
    "CategoryProductPrice",
    "ClientPriceAssignmentRead",
    "ClientPriceAssignmentUpsert",
    "ClientPriceRead",
    "ClientPriceUpsert",
    "GeneralPriceRead",
    "GeneralPriceUpsert",
    "PriceCategoryCreate",
    "PriceCategoryRead",
    "PriceCategoryUpdate",
    "PriceSource",
    "ResolvedPrice",
    "ResolvedPriceRead",
    # Consumption
    "ConsumptionCreate",
    "ConsumptionDayRow",
    "ConsumptionRead",
    "SequenceNumberRead",
    # Payment
    "PaymentCreate",
    "PaymentRead",
    "PaymentReportRow",
    "PaymentTypeRead",
    # Report
    "BalanceStatus",
    "ClientSummary",
    "ConsumptionReport",
    "ConsumptionReportRow",
    "ReportGroupBy",
]
