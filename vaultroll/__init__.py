"""
Vaultroll — A Jackpot Wagering Mini-Game Backend
=================================================
Players hold a balance, wager whole credits against a shared jackpot pool,
and collect a daily allowance.  Every wager is settled atomically against
the database: balance, pool and bet ledger move together or not at all.

Package layout::

    vaultroll/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Bands, seeds, presentation constants
    ├── errors.py          # Machine-readable error taxonomy
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + session helpers
    │   ├── models.py      # accounts, jackpot_pool, bets
    │   └── ledger.py      # Conditional-update store primitives
    ├── engine/
    │   ├── outcome.py     # Roll → band → payout (pure)
    │   ├── settlement.py  # Band → balance/pool deltas (pure)
    │   ├── flavor.py      # Outcome → presentation descriptor (pure)
    │   └── cooldown.py    # Allowance window arithmetic (pure)
    ├── services/
    │   ├── wager_service.py     # PlaceWager (transactional / compensating)
    │   ├── allowance_service.py # ClaimDailyAllowance
    │   ├── state_service.py     # Pool state + recent wins
    │   └── account_service.py   # Registration + account summary
    └── api/
        ├── main.py        # FastAPI app + error handlers
        ├── deps.py        # Dependency injection
        └── routes/        # Game + account endpoints
"""

__version__ = "0.1.0"
