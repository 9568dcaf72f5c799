"""
pantry_services -- orchestration over the pure engines.

Services own the injected clock and configuration and assemble engine
results into read models.  They hold no inventory state between calls.
"""

from pantry_services.summary_service import DashboardMetrics, InventorySummaryService

__all__ = [
    "DashboardMetrics",
    "InventorySummaryService",
]
