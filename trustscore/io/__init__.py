# file: trustscore/io/__init__.py
