"""
Shopify to Wcart Migration Service

Moves e-commerce data (products, customers, orders) from a Shopify store
into a Wcart store.

Supports:
- Fetching Shopify records into a local relational cache
- User-defined field mappings with simple value transformations
- Batched, resumable-by-inspection migration runs with per-item logs
- An HTTP API for starting runs, polling progress and managing mappings
"""

__version__ = "0.1.0"
