"""
Connection management for the bundled storage backends.

- mongo_connection: motor client with a driver-style ready state
- sqlite_connection: single long-lived aiosqlite connection with serialised writes
"""
