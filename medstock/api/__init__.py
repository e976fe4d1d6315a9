"""MedStock HTTP API"""
