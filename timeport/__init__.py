"""
Timeport: import and entity reconciliation engine for multi-tenant time tracking.

Exports from third-party time trackers (CSV dialects, ZIP bundles) are merged
into an organization's existing data set inside a single transaction.
"""
