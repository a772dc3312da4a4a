"""eVaka finance and Koski rules service.

This package is organized by feature modules (daycare, absences, koski,
invoicing, ...) with a thin Flask controller layer and service/repository
layers underneath.
"""
