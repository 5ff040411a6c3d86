# Consumer service
