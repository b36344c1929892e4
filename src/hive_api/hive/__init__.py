"""
Hive Domain Module

Access control and lifecycle rules for hives:
- Capability token issuance and verification
- Open/closed and reveal gating derived from timestamps
- Message submission and listing gates
- Single-shot harvest with notification fan-out
"""
