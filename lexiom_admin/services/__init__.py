"""Authentication, authorization and audit services"""
