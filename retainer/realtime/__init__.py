"""Realtime infrastructure (Socket.IO).

Holds the notification hub that keeps public and admin retainer dashboards in
sync with committed mutations, and the publishers that feed it.
"""
