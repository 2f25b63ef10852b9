"""
Bulk item creation from spreadsheets: adapters (file I/O only), header
alias mapping (pure), and the import service that feeds each row to the
lifecycle controller.
"""
