"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused; queries are assembled with DbQuery so
services never hold SQL strings.
"""
