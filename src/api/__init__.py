"""API: camada de borda.

Responsabilidades:
- Expor endpoints HTTP de operação (status, pareamento, envio)
- Normalizar eventos brutos do transporte para o modelo canônico
- Entregar mensagens canônicas ao webhook configurado

Subpastas:
- connectors/: clientes HTTP externos (webhook)
- normalizers/: eventos brutos → CanonicalMessage
- routes/: endpoints HTTP (health, sessão, mensagens)

NÃO PODE conter: FSM, regras de sessão, política de reconexão.
"""
