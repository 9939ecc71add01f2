"""Planner services"""
