"""Configuration, persistence, logging and security"""
