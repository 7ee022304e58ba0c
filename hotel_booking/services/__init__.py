"""
Service layer - every operation takes the acting user and is authorized
before it touches protected data
"""
