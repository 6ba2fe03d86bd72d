import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from botocore.exceptions import ClientError
from email_validator import EmailNotValidError, validate_email

from evently import config
from evently.database.dynamodb import clean_item
from evently.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from evently.schemas.user import ProfileUpdate, UserOut, UserRegister
from evently.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

DEFAULT_AVATAR = "https://images.pexels.com/photos/733872/pexels-photo-733872.jpeg?auto=compress&cs=tinysrgb&w=150"
MIN_PASSWORD_LENGTH = 6


def user_key(user_id: str) -> Dict[str, str]:
    return {"PK": f"USER#{user_id}", "SK": "PROFILE"}


def email_claim_key(email: str) -> Dict[str, str]:
    return {"PK": f"USER_EMAIL#{email}", "SK": "CLAIM"}


class UserService:
    def __init__(self, dynamodb_resource, table_name=config.TABLE_NAME):
        self.dynamodb = dynamodb_resource
        self.table = dynamodb_resource.Table(table_name)

    def register_user(self, user_data: UserRegister) -> Tuple[UserOut, str]:
        """Create a regular user account and return it with a fresh token"""
        if not user_data.name or not user_data.email or not user_data.password:
            raise ValidationError("Name, email, and password are required")

        return self._create_user(
            name=user_data.name,
            email=user_data.email,
            password=user_data.password,
            role="user",
            avatar=user_data.avatar,
        )

    def create_admin(self, name: str, email: str, password: str) -> Tuple[UserOut, str]:
        return self._create_user(name=name, email=email, password=password, role="admin")

    def authenticate(self, email: Optional[str], password: Optional[str]) -> Tuple[UserOut, str]:
        if not email or not password:
            raise ValidationError("Email and password are required")

        item = self._get_user_item_by_email(email.strip().lower())
        if item is None or not verify_password(password, item.get("password")):
            raise AuthenticationError("Invalid email or password")

        user = self._to_user(item)
        logger.info("User %s logged in", user.id)
        return user, create_access_token(user.id, user.email, user.role)

    def get_user(self, user_id: str) -> UserOut:
        item = self._get_user_item(user_id)
        if item is None:
            raise NotFoundError("User not found")
        return self._to_user(item)

    def update_profile(self, user_id: str, profile: ProfileUpdate) -> UserOut:
        changes = {
            k: v.strip() if isinstance(v, str) else v
            for k, v in profile.model_dump(exclude_unset=True, exclude_none=True).items()
        }
        if "name" in changes and not changes["name"]:
            raise ValidationError("Name cannot be empty")
        if not changes:
            return self.get_user(user_id)

        changes["updatedAt"] = datetime.now(timezone.utc).isoformat()
        names = {}
        values = {}
        assignments = []
        for i, (field, value) in enumerate(changes.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = value
            assignments.append(f"#f{i} = :v{i}")

        try:
            response = self.table.update_item(
                Key=user_key(user_id),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise NotFoundError("User not found")
            raise

        logger.info("Updated profile for user %s", user_id)
        return self._to_user(response["Attributes"])

    def change_password(
        self, user_id: str, current_password: Optional[str], new_password: Optional[str]
    ) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 6 characters long")

        item = self._get_user_item(user_id)
        if item is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, item.get("password")):
            raise AuthenticationError("Current password is incorrect")

        self.table.update_item(
            Key=user_key(user_id),
            UpdateExpression="SET #password = :password, updatedAt = :now",
            ExpressionAttributeNames={"#password": "password"},
            ExpressionAttributeValues={
                ":password": hash_password(new_password),
                ":now": datetime.now(timezone.utc).isoformat(),
            },
        )
        logger.info("Password changed for user %s", user_id)

    def _create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
        avatar: Optional[str] = None,
    ) -> Tuple[UserOut, str]:
        email = email.strip().lower()
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise ValidationError("Please enter a valid email address")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError("Password must be at least 6 characters long")

        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()
        item = {
            **user_key(user_id),
            "id": user_id,
            "name": name.strip(),
            "email": email,
            "role": role,
            "avatar": avatar or DEFAULT_AVATAR,
            "password": hash_password(password),
            "createdAt": now,
            "updatedAt": now,
        }

        # The claim item makes the email unique across users
        transact_items = [
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": {**email_claim_key(email), "userId": user_id},
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
            {
                "Put": {
                    "TableName": self.table.table_name,
                    "Item": item,
                    "ConditionExpression": "attribute_not_exists(PK)",
                }
            },
        ]

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                raise ConflictError("User with this email already exists")
            raise

        user = self._to_user(item)
        logger.info("Registered %s user %s", role, user.id)
        return user, create_access_token(user.id, user.email, user.role)

    def _get_user_item(self, user_id: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key=user_key(user_id))
        return response.get("Item")

    def _get_user_item_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        response = self.table.get_item(Key=email_claim_key(email))
        claim = response.get("Item")
        if claim is None:
            return None
        return self._get_user_item(claim["userId"])

    def _to_user(self, item: Dict[str, Any]) -> UserOut:
        data = clean_item(item)
        data.pop("password", None)
        return UserOut(**data)
