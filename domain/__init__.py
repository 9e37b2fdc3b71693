"""
Domain layer - profiles, contracts, jobs and the money and date types they use.

Nothing here touches the database or the web framework.
"""
