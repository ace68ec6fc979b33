"""Dated question-sets published by admins."""
