"""General development kit: conversion, JSON, structured errors, JWT auth, HTTP binding and WSGI middleware."""

__version__ = "0.1.0"