# file: trustscore/scoring/__init__.py
