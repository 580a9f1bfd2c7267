"""Single-pass payments ledger with deposit disputes."""
