"""
Core Domain Layer - O Hexágono.

Este pacote contém a lógica de negócio pura, sem dependências de frameworks.
Características:
- Zero dependências externas (Django, Celery, etc.)
- 100% testável sem banco de dados
- Relógio injetado (Clock) para regras temporais

Domínios:
- chamados: ciclo de vida de chamados de suporte
- shared: exceções, eventos, interfaces e relógio
"""
