"""
Shared kernel: the pieces every transport context builds on.

Domain errors, value objects, transition tables and the pricing protocol
live in ``shared.domain``; the unit of work, message bus and role guards in
``shared.application``; DRF glue in ``shared.api``.
"""
