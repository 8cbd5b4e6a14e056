"""
Simulation Engine

HOW the world advances: the tick scheduler, the income pipeline, cached
effects, and every service that mutates the Ledger. All services receive
the Ledger as an argument; none keeps a reference to it except the
scheduler (owner) and the EffectAggregator (read-only, rebound on load).
"""
