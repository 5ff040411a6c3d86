# API service
