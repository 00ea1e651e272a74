"""Core domain logic for the health records dashboard.

This package contains the health metrics, risk scoring and record query
logic, isolated from storage and presentation for easy testing and reasoning.
"""
