# file: trustscore/core/__init__.py
