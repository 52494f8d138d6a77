"""Wholesale ordering backend"""
