"""서비스 패키지 — 데이터 접근 및 비즈니스 로직 계층.

Service package — Data access and business logic layer.
``DatabaseService`` executes queries and saves records; the domain services
call the generic repository and shape API responses.
"""
