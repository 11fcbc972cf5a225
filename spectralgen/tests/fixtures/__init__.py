"""Test fixtures for spectralgen tests.

This module provides sample OpenAPI documents used across the reader and
writer tests.
"""

from spectralgen.reader.document import Document
from spectralgen.reader.loader import SchemaLoader


def load_document(spec: dict) -> Document:
    """Dereference and validate an in-memory document."""
    loader = SchemaLoader()
    return loader.validate(loader.dereference(spec), 'test')


# Minimal OpenAPI 3.0 document with a server and no paths
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'servers': [{'url': 'https://api.example.com'}],
    'paths': {},
}

# One operation and one apiKey scheme
USERS_SPEC = {
    'openapi': '3.0.3',
    'info': {
        'title': 'Users API',
        'version': '1.0.0',
        'description': 'Manage users.',
    },
    'servers': [{'url': 'https://api.example.com/v1'}],
    'paths': {
        '/users/{userId}': {
            'get': {
                'operationId': 'getUser',
                'summary': 'Get a user',
                'parameters': [
                    {
                        'name': 'userId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {'200': {'description': 'The user'}},
            }
        }
    },
    'components': {
        'securitySchemes': {
            'apiKeyAuth': {'type': 'apiKey', 'name': 'X-Api-Key', 'in': 'header'}
        }
    },
}

# Petstore-like API using component references, allOf bodies and every
# supported security scheme
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Petstore API', 'version': '1.0.0'},
    'servers': [
        {
            'url': 'https://{region}.petstore.example.com/api/v1',
            'variables': {'region': {'default': 'eu', 'enum': ['eu', 'us']}},
        }
    ],
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'summary': 'List all pets',
                'parameters': [
                    {'$ref': '#/components/parameters/Limit'},
                    {
                        'name': 'status',
                        'in': 'query',
                        'description': 'Filter by status.',
                        'schema': {'$ref': '#/components/schemas/Status'},
                    },
                    {
                        'name': 'X-Request-Id',
                        'in': 'header',
                        'schema': {'type': 'string'},
                    },
                ],
                'responses': {'200': {'description': 'A list of pets'}},
            },
            'post': {
                'operationId': 'createPet',
                'description': 'Create a pet. The pet is stored immediately.',
                'requestBody': {
                    'required': True,
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/NewPet'}
                        }
                    },
                },
                'responses': {'201': {'description': 'Created'}},
            },
        },
        '/pets/{pet-id}': {
            'parameters': [
                {
                    'name': 'pet-id',
                    'in': 'path',
                    'required': True,
                    'schema': {'type': 'integer'},
                }
            ],
            'get': {
                'operationId': 'getPet',
                'responses': {'200': {'description': 'A pet'}},
            },
            'delete': {
                'responses': {'204': {'description': 'Deleted'}},
            },
        },
        '/2fa/verify': {
            'post': {
                'operationId': 'verify',
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {
                                'type': 'object',
                                'properties': {'code': {'type': 'string'}},
                            }
                        }
                    }
                },
                'responses': {'200': {'description': 'Verified'}},
            }
        },
    },
    'components': {
        'parameters': {
            'Limit': {
                'name': 'limit',
                'in': 'query',
                'schema': {'type': 'integer', 'default': 20},
            }
        },
        'schemas': {
            'Status': {
                'type': 'string',
                'enum': ['available', 'pending', 'sold'],
            },
            'Pet': {
                'type': 'object',
                'required': ['id'],
                'properties': {
                    'id': {'type': 'integer', 'readOnly': True},
                    'name': {'type': 'string', 'description': 'Name of the pet'},
                },
            },
            'NewPet': {
                'allOf': [
                    {'$ref': '#/components/schemas/Pet'},
                    {
                        'type': 'object',
                        'required': ['name'],
                        'properties': {
                            'tag': {'type': 'string', 'example': 'dog'},
                            'vaccinated': {'type': 'boolean'},
                        },
                    },
                ]
            },
        },
        'securitySchemes': {
            'petstore_auth': {
                'type': 'oauth2',
                'flows': {
                    'authorizationCode': {
                        'authorizationUrl': 'https://petstore.example.com/oauth/authorize',
                        'tokenUrl': 'https://petstore.example.com/oauth/token',
                        'scopes': {
                            'read:pets': 'read your pets',
                            'write:pets': 'modify pets in your account',
                        },
                    }
                },
            },
            'basicAuth': {
                'type': 'http',
                'scheme': 'basic',
                'description': 'Basic authentication. Use your account password.',
            },
            'bearerAuth': {'type': 'http', 'scheme': 'bearer'},
        },
    },
}

# Body properties whose names sanitize to the same identifier
COLLIDING_BODY_SPEC = {
    'openapi': '3.1.0',
    'info': {'title': 'Colliding API', 'version': '1.0.0'},
    'servers': [{'url': 'https://api.example.com'}],
    'paths': {
        '/items': {
            'post': {
                'operationId': 'createItem',
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {
                                'type': 'object',
                                'properties': {
                                    'foo-bar': {'type': 'string'},
                                    'foo_bar': {'type': ['integer', 'null']},
                                },
                            }
                        }
                    }
                },
                'responses': {'200': {'description': 'OK'}},
            }
        }
    },
}

# Self-referencing schema; only reachable through a response
RECURSIVE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Tree API', 'version': '1.0.0'},
    'servers': [{'url': 'https://api.example.com'}],
    'paths': {
        '/nodes': {
            'get': {
                'operationId': 'listNodes',
                'responses': {
                    '200': {
                        'description': 'Nodes',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Node'}
                            }
                        },
                    }
                },
            }
        }
    },
    'components': {
        'schemas': {
            'Node': {
                'type': 'object',
                'properties': {
                    'children': {
                        'type': 'array',
                        'items': {'$ref': '#/components/schemas/Node'},
                    }
                },
            }
        }
    },
}

# Request body whose schema refers to itself through a property
RECURSIVE_BODY_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Tree API', 'version': '1.0.0'},
    'servers': [{'url': 'https://api.example.com'}],
    'paths': {
        '/nodes': {
            'post': {
                'operationId': 'createNode',
                'requestBody': {
                    'content': {
                        'application/json': {
                            'schema': {'$ref': '#/components/schemas/Node'}
                        }
                    }
                },
            }
        }
    },
    'components': {
        'schemas': {
            'Node': {
                'type': 'object',
                'required': ['name'],
                'properties': {
                    'name': {'type': 'string'},
                    'parent': {'$ref': '#/components/schemas/Node'},
                },
            }
        }
    },
}


def layered_spec(depth: int, back_reference: bool = False) -> dict:
    """A document whose body schema S0 refers to S1 twice, S1 to S2 twice, and so on.

    With ``back_reference`` the last layer refers to S0 again.
    """
    schemas = {
        f'S{i}': {
            'type': 'object',
            'properties': {
                'a': {'$ref': f'#/components/schemas/S{i + 1}'},
                'b': {'$ref': f'#/components/schemas/S{i + 1}'},
            },
        }
        for i in range(depth)
    }
    schemas[f'S{depth}'] = {'type': 'object', 'properties': {'leaf': {'type': 'string'}}}
    if back_reference:
        schemas[f'S{depth}']['properties']['back'] = {'$ref': '#/components/schemas/S0'}

    return {
        'openapi': '3.0.0',
        'info': {'title': 'Layers', 'version': '1.0.0'},
        'servers': [{'url': 'https://api.example.com'}],
        'paths': {
            '/layers': {
                'post': {
                    'operationId': 'createLayer',
                    'requestBody': {
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/S0'}
                            }
                        }
                    },
                }
            }
        },
        'components': {'schemas': schemas},
    }


OAUTH2_NO_SCOPES_SCHEME = {
    'type': 'oauth2',
    'flows': {
        'authorizationCode': {
            'authorizationUrl': 'https://example.com/authorize',
            'tokenUrl': 'https://example.com/token',
            'scopes': {},
        }
    },
}

OAUTH2_CLIENT_CREDENTIALS_SCHEME = {
    'type': 'oauth2',
    'flows': {
        'clientCredentials': {
            'tokenUrl': 'https://example.com/token',
            'scopes': {},
        }
    },
}

SWAGGER_SPEC = {
    'swagger': '2.0',
    'info': {'title': 'Legacy API', 'version': '1.0.0'},
    'basePath': '/v1',
    'paths': {},
}
