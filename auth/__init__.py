"""auth/ -- Authentication package for fintrack.

Layer rule: auth/ imports only stdlib + third-party libraries, plus core/
for settings. It does NOT import from api/, web/, or ledger/.
api/ and web/ import from auth/, not the other way around.
"""
