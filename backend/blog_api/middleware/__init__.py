# Middleware package init
"""
Blog API Backend — Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Middleware executes in reverse order of registration in main.py, so the
    request id is set before the access log reads it, and the access log
    sees the final status code on the way out.
"""
