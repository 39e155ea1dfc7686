# Routes package init
"""
Blog API Backend — API Routes Package
=======================================

Route Inventory:
    - posts.py:   GET/POST /posts, GET/PUT/DELETE /posts/{id}
    - health.py:  GET /health

Routes are thin: they parse the request, call the post store, and pick the
status code. Persistence lives in services/post_store.py.
"""
