"""
Sign-in dialog state machine.

Drives one "prove you own this email, then produce an assertion" transaction:
check auth -> pick/stage email -> confirm -> authenticate -> generate assertion.
"""
