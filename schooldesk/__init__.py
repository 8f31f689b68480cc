"""SchoolDesk: fee collection, coupons and term results for schools"""

__version__ = "1.0.0"
