"""TheraLink API - therapy marketplace backend"""
