"""company/ -- Employer records listed on the job board.

Layer rule: company/ imports only stdlib, third-party libraries and core/.
"""
