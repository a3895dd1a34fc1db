"""File calendar storage service.

Kept as a regular package so ``app`` resolves to this project rather than to
an unrelated ``app`` module that may be installed in site-packages.
"""
