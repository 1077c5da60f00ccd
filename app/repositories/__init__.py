"""
Repositories package

Each repository encapsulates database operations for a model:
- games_repository.py
- artbackfilllog_repository.py

Usage:
    from repositories.games_repository import GamesRepository
    game = GamesRepository.get_by_id(1)
"""
