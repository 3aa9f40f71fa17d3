"""
Commands - Workflow implementations for netpay.

Each module corresponds to a top-level CLI command:
- open_allocation:  Stake on a deployment under a fresh allocation ID
- send_payment:     Approve and collect a payment into an allocation
- close_allocation: Close an allocation
- batch:            Write a Safe Transaction Builder document for offline signing
"""
