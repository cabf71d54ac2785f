"""레포지토리 패키지 — 데이터베이스 조회 계층.

Repository package — Database lookup layer.
Contains the table registry (record kind -> table descriptor) and the
generic repository shared by every record kind.
"""
