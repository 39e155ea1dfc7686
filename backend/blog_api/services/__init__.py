# Services package init
"""
Blog API Backend — Services Layer
===================================

Service Inventory:
    - PostStore: every persistence operation on blog posts
      (insert_many, find_by_id, find_one, list_all, count, create,
      update_by_id, delete_by_id, delete_all)
"""
