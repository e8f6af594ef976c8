"""SQLite persistence for creators, tips, current scores and daily snapshots."""
