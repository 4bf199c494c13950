"""
Coin inventory, reservation, selection and funding.
"""
