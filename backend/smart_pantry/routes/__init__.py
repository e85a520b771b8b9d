"""
Smart Pantry Backend: API Routes Package
=========================================

Route Inventory:
    - auth.py:        POST /signup, /login, /logout, /refresh-token
                      GET  /csrf, /verify-token
    - food_items.py:  GET/POST /api/food-items
                      GET/PUT/DELETE /api/food-items/{id}
    - recipes.py:     GET  /api/recipes/suggestions
    - health.py:      GET  /health
    - dependencies.py: get_current_user (access-token resolution)

Routes stay thin: read the request, call a service, shape the response.
"""
