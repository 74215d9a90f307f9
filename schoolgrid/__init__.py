"""
SchoolGrid: schedule grid, list filters and evaluation averages for an
education-center dashboard.
"""
