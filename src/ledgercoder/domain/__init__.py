"""Domain layer for ledgercoder application.

Services are imported from their modules directly (e.g.
``from ledgercoder.domain.coding import CodingEngine``); this package keeps no
eager imports so the ledger file layer can depend on the entities without an
import cycle.
"""
