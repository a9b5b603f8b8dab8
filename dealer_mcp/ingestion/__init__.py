"""Dealer feed ingestion."""
