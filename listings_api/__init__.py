"""
Listings API package.

A FastAPI service exposing property listings and user profiles stored in
Cloud Firestore, authenticated with Firebase ID tokens.
"""
