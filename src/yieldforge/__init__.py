"""YieldForge: DeFi yield assistant API."""
