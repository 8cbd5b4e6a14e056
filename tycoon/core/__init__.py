"""
Core World Model (FINAL / FROZEN)

Defines WHAT the simulated economy is, independent of scheduling, IO or network.

Invariants:
- Money is decimal.Decimal and never negative after any tick or spend.
- The Ledger is the single mutable aggregate; subsystems receive it by
  reference, nothing reads it through a global.
- Lifetime counters (total_money_earned, total_play_time_seconds,
  prestige.total_prestige_points) only grow; no reset touches them.
- permanent_multiplier stays inside [1.0, max] after prestige and after load.

Core explicitly does NOT:
- Decide when time advances (TickScheduler does)
- Perform IO (persistence / network live outside core)
- Cache derived bonuses (EffectAggregator does)
"""
