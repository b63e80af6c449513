"""Connectors: adapters de borda para sistemas externos.

Estrutura:
- webhook/: entrega HTTP at-most-once ao sistema de automação (n8n ou similar)

Cada destino tem seu próprio connector, garantindo SRP e isolamento de falhas.
"""

__all__: list[str] = []
