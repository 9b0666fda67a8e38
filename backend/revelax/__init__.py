"""Revelax room coordinator backend."""
