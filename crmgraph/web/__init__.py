"""
HTTP surface for the graph engine (CherryPy).

    /network/...     NetworkAPI
    /dashboard/...   DashboardAPI
"""
