"""Tests for the trainassess service."""
