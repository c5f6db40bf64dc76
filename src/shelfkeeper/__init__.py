# ABOUTME: Shelfkeeper, a school library inventory and lending tracker.
# ABOUTME: Catalog and roster stores, the lending engine, and the relationship graph view.
