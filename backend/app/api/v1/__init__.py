"""
API v1 Routes
Progetto: Materials Ledger (Gestionale Forniture)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from app.api.v1 import clients, consumption, payments, pricing, products, reports

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(clients.router)
api_v1_router.include_router(products.router)
api_v1_router.include_router(pricing.router)
api_v1_router.include_router(consumption.router)
api_v1_router.include_router(payments.router)
api_v1_router.include_router(reports.router)

# Esportazione
__all__ = ["api_v1_router"]
