"""
Jobzee - job board REST API.

Architecture:
- MongoDB: every entity (accounts, jobs, internships, applications, payments...)
- Razorpay / Cloudinary / Mapbox: payments, file storage, geocoding over HTTPS
- numpy: salary model, job recommendations, candidate screening
"""

__version__ = "1.0.0"
