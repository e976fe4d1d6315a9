"""Pydantic schemas for the MedStock API"""
