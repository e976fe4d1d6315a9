"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter
from medstock.api.v1 import auth, storage, medications, movements, exports

api_router = APIRouter()

# Authentication routes
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])

# Stock locations
api_router.include_router(storage.principal_router, prefix="/storage/principal", tags=["storage-principal"])
api_router.include_router(storage.secondary_router, prefix="/storage/secondary", tags=["storage-secondary"])

# Medications and movement history
api_router.include_router(medications.router, prefix="/medications", tags=["medications"])
api_router.include_router(movements.withdrawals_router, prefix="/withdrawals", tags=["withdrawals"])
api_router.include_router(movements.transfers_router, prefix="/transfers", tags=["transfers"])

# CSV exports
api_router.include_router(exports.router, prefix="/export", tags=["export"])
