"""Stripe Payment Monitor."""
