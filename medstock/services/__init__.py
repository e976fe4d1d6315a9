"""
MedStock Services
Business logic behind the API routers
"""
