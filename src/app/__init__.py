"""App: coração do sistema: ciclo de vida da sessão, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- sessions/: controlador da sessão, política de reconexão, snapshot
- use_cases/: encaminhamento inbound e envio outbound
- infra/: implementações concretas de IO (stores, transporte)
- protocols/: contratos/interfaces e modelos canônicos
- observability/: correlation id e métricas em logs

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
