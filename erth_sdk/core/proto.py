"""
ERTH SDK - Protobuf Schema

Message classes for the subset of the Cosmos SDK / Secret Network protobuf
schema needed to build and sign an execute transaction. Field names and
numbers follow the published .proto files; the descriptors are registered
in a private pool so they never clash with other cosmos packages.
"""

from google.protobuf import any_pb2, descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(any_pb2.DESCRIPTOR.serialized_pb)


def _field(name, number, field_type, type_name=None, repeated=False):
    field = _F(
        name=name,
        number=number,
        type=field_type,
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if type_name:
        field.type_name = type_name
    return field


def _message(name, *fields, nested=()):
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    message.nested_type.extend(nested)
    return message


def _register(name, package, messages=(), enums=(), dependencies=()):
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=name,
        package=package,
        syntax="proto3",
        dependency=list(dependencies),
    )
    file_proto.message_type.extend(messages)
    file_proto.enum_type.extend(enums)
    _POOL.AddSerializedFile(file_proto.SerializeToString())


# =============================================================================
# Schema
# =============================================================================

_register(
    "cosmos/base/v1beta1/coin.proto",
    "cosmos.base.v1beta1",
    messages=[
        _message(
            "Coin",
            _field("denom", 1, _F.TYPE_STRING),
            _field("amount", 2, _F.TYPE_STRING),
        ),
    ],
)

_register(
    "secret/compute/v1beta1/msg.proto",
    "secret.compute.v1beta1",
    dependencies=["cosmos/base/v1beta1/coin.proto"],
    messages=[
        _message(
            "MsgExecuteContract",
            _field("sender", 1, _F.TYPE_BYTES),
            _field("contract", 2, _F.TYPE_BYTES),
            _field("msg", 3, _F.TYPE_BYTES),
            _field("callback_code_hash", 4, _F.TYPE_STRING),
            _field("sent_funds", 5, _F.TYPE_MESSAGE, ".cosmos.base.v1beta1.Coin", repeated=True),
            _field("callback_sig", 6, _F.TYPE_BYTES),
        ),
    ],
)

_register(
    "cosmos/crypto/secp256k1/keys.proto",
    "cosmos.crypto.secp256k1",
    messages=[_message("PubKey", _field("key", 1, _F.TYPE_BYTES))],
)

_register(
    "cosmos/tx/signing/v1beta1/signing.proto",
    "cosmos.tx.signing.v1beta1",
    enums=[
        descriptor_pb2.EnumDescriptorProto(
            name="SignMode",
            value=[
                descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_UNSPECIFIED", number=0),
                descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_DIRECT", number=1),
                descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_TEXTUAL", number=2),
                descriptor_pb2.EnumValueDescriptorProto(name="SIGN_MODE_LEGACY_AMINO_JSON", number=127),
            ],
        ),
    ],
)

_register(
    "cosmos/tx/v1beta1/tx.proto",
    "cosmos.tx.v1beta1",
    dependencies=[
        "google/protobuf/any.proto",
        "cosmos/base/v1beta1/coin.proto",
        "cosmos/tx/signing/v1beta1/signing.proto",
    ],
    messages=[
        _message(
            "TxBody",
            _field("messages", 1, _F.TYPE_MESSAGE, ".google.protobuf.Any", repeated=True),
            _field("memo", 2, _F.TYPE_STRING),
            _field("timeout_height", 3, _F.TYPE_UINT64),
        ),
        _message(
            "ModeInfo",
            _field("single", 1, _F.TYPE_MESSAGE, ".cosmos.tx.v1beta1.ModeInfo.Single"),
            nested=[
                _message(
                    "Single",
                    _field("mode", 1, _F.TYPE_ENUM, ".cosmos.tx.signing.v1beta1.SignMode"),
                ),
            ],
        ),
        _message(
            "SignerInfo",
            _field("public_key", 1, _F.TYPE_MESSAGE, ".google.protobuf.Any"),
            _field("mode_info", 2, _F.TYPE_MESSAGE, ".cosmos.tx.v1beta1.ModeInfo"),
            _field("sequence", 3, _F.TYPE_UINT64),
        ),
        _message(
            "Fee",
            _field("amount", 1, _F.TYPE_MESSAGE, ".cosmos.base.v1beta1.Coin", repeated=True),
            _field("gas_limit", 2, _F.TYPE_UINT64),
            _field("payer", 3, _F.TYPE_STRING),
            _field("granter", 4, _F.TYPE_STRING),
        ),
        _message(
            "AuthInfo",
            _field("signer_infos", 1, _F.TYPE_MESSAGE, ".cosmos.tx.v1beta1.SignerInfo", repeated=True),
            _field("fee", 2, _F.TYPE_MESSAGE, ".cosmos.tx.v1beta1.Fee"),
        ),
        _message(
            "SignDoc",
            _field("body_bytes", 1, _F.TYPE_BYTES),
            _field("auth_info_bytes", 2, _F.TYPE_BYTES),
            _field("chain_id", 3, _F.TYPE_STRING),
            _field("account_number", 4, _F.TYPE_UINT64),
        ),
        _message(
            "TxRaw",
            _field("body_bytes", 1, _F.TYPE_BYTES),
            _field("auth_info_bytes", 2, _F.TYPE_BYTES),
            _field("signatures", 3, _F.TYPE_BYTES, repeated=True),
        ),
    ],
)


def _cls(full_name):
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(full_name))


Any = _cls("google.protobuf.Any")
Coin = _cls("cosmos.base.v1beta1.Coin")
MsgExecuteContract = _cls("secret.compute.v1beta1.MsgExecuteContract")
PubKey = _cls("cosmos.crypto.secp256k1.PubKey")
TxBody = _cls("cosmos.tx.v1beta1.TxBody")
ModeInfo = _cls("cosmos.tx.v1beta1.ModeInfo")
SignerInfo = _cls("cosmos.tx.v1beta1.SignerInfo")
Fee = _cls("cosmos.tx.v1beta1.Fee")
AuthInfo = _cls("cosmos.tx.v1beta1.AuthInfo")
SignDoc = _cls("cosmos.tx.v1beta1.SignDoc")
TxRaw = _cls("cosmos.tx.v1beta1.TxRaw")


def serialize(message) -> bytes:
    """Deterministic wire encoding (map entries sorted, defaults omitted)."""
    return message.SerializeToString(deterministic=True)
