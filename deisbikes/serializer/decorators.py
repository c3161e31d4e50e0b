"""
Decorators
----------

Decorators that take care of the JSON going in and out of the views.
The views themselves only ever deal in plain dictionaries.

.. note:: Annotating a route with ``@expects(None)`` or ``@returns(None)``
    has no effect besides making the route definitions easier to read.
"""

from functools import wraps
from http import HTTPStatus
from json import JSONDecodeError
from typing import Optional, Tuple, Union

from aiohttp import web
from aiohttp.web_urldispatcher import View
from marshmallow import Schema, ValidationError
from marshmallow_jsonschema import JSONSchema

from deisbikes.serializer.jsend import JSendSchema, JSendStatus


def _fail(message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST, **data) -> web.Response:
    """Builds a JSend failure response."""
    return web.json_response(JSendSchema().dump({
        "status": JSendStatus.FAIL,
        "data": {"message": message, **data}
    }), status=status)


def expects(schema: Optional[Schema], into="data"):
    """
    A decorator that asserts that the JSON body of the request
    validates the given :class:`~marshmallow.Schema`.

    Valid data is stored on the request under ``into``. Missing,
    malformed, or invalid bodies are turned away with a 400 and
    the JSON schema the route expects.

    .. code:: python

        @expects(BeginRentalSchema())
        async def post(self):
            rental_type = self.request["data"]["type"]

    :param schema: The schema to validate.
    :param into: The key to store the validated data in.
    """

    if schema is None:
        return lambda x: x

    if not isinstance(schema, Schema):
        raise TypeError(f"Expected a Schema, got {type(schema)}")

    json_schema = JSONSchema().dump(schema)["definitions"][type(schema).__name__]

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):
            request = self.request

            if not request.body_exists or request.content_type != "application/json":
                return _fail(
                    f"This route ({request.method}: {request.rel_url}) only accepts JSON.",
                    schema=json_schema
                )

            try:
                request[into] = schema.load(await request.json())
            except JSONDecodeError as err:
                return _fail("Could not parse supplied JSON.", errors=err.args)
            except ValidationError as err:
                return _fail("The request did not validate properly.", errors=err.messages, schema=json_schema)

            return await original_function(self, **kwargs)

        return new_func

    return decorator


def returns(
    schema: Optional[Schema] = None, return_code: HTTPStatus = HTTPStatus.OK,
    **named_schema: Union[Schema, Tuple[Schema, HTTPStatus]]
):
    """
    A decorator that dumps the data returned from the route through
    the given :class:`~marshmallow.Schema`, so routes can return plain
    python dictionaries.

    When named schemas are given instead, the route returns a
    ``(name, data)`` tuple and the matching schema (and status code,
    if paired with one) is used.

    .. code:: python

        @returns(
            rental=JSendSchema.of(rental=SnapshotSchema()),
            not_ready=(JSendSchema(), HTTPStatus.CONFLICT),
        )
        async def get(self):
            return "rental", {"status": JSendStatus.SUCCESS, "data": {...}}

    :param schema: The schema that the output data must conform to
    :param return_code: The code to return
    :param named_schema: Schema names, paired with their schema and return values.
    """

    if schema is None and not named_schema:
        return lambda x: x

    named_schema[None] = (schema, return_code)

    def decorator(original_function):

        @wraps(original_function)
        async def new_func(self: View, **kwargs):

            if schema:
                schema_name, response_data = None, await original_function(self, **kwargs)
            else:
                schema_name, response_data = await original_function(self, **kwargs)

            try:
                matched_schema = named_schema[schema_name]
                if isinstance(matched_schema, tuple):
                    matched_schema, matched_return_code = matched_schema
                else:
                    matched_return_code = return_code
                return web.json_response(matched_schema.dump(response_data), status=matched_return_code)
            except (ValidationError, KeyError) as err:
                return web.json_response(JSendSchema().dump({
                    "status": JSendStatus.ERROR,
                    "data": {"errors": err.messages if isinstance(err, ValidationError) else err.args},
                    "message": "We tried to send you data back, but it came out wrong.",
                }), status=HTTPStatus.INTERNAL_SERVER_ERROR)

        return new_func

    return decorator
