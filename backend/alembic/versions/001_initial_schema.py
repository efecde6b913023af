"""Initial schema - workspaces, users, memberships and SSO configs

Revision ID: 001
Revises:
Create Date: 2026-10-18

WHY: SSO sign-in reads and writes organizations, users, memberships, group
permissions, per-workspace SSO configs and instance settings. The unique
constraints on lower(users.email) and (organization_users.user_id,
organization_id) back up provisioning against concurrent first sign-ins.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    """Create all sign-in tables."""
    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('enable_sign_up', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('domain', sa.String(length=1024), nullable=True),
        sa.Column('inherit_sso', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_organizations'),
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'])
    op.create_index('ix_organizations_name', 'organizations', ['name'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=True),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'INVITED', 'ARCHIVED', name='user_status'),
            nullable=False,
            server_default='ACTIVE',
        ),
        sa.Column('invitation_token', sa.String(length=255), nullable=True),
        sa.Column('default_organization_id', sa.Integer(), nullable=True),
        sa.Column(
            'user_type',
            sa.Enum('WORKSPACE', 'INSTANCE', name='user_type'),
            nullable=False,
            server_default='WORKSPACE',
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.ForeignKeyConstraint(
            ['default_organization_id'], ['organizations.id'],
            name='fk_users_default_organization_id_organizations',
            ondelete='SET NULL',
        ),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('uq_users_email_lower', 'users', [sa.text('lower(email)')], unique=True)
    op.create_index('ix_users_default_organization_id', 'users', ['default_organization_id'])

    op.create_table(
        'organization_users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('INVITED', 'ACTIVE', name='membership_status'),
            nullable=False,
            server_default='INVITED',
        ),
        sa.Column('role', sa.String(length=64), nullable=False, server_default='all-users'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_organization_users'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_organization_users_user_id_users', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_organization_users_organization_id_organizations', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'organization_id', name='uq_organization_users_user_id'),
    )
    op.create_index('ix_organization_users_id', 'organization_users', ['id'])
    op.create_index('ix_organization_users_user_id', 'organization_users', ['user_id'])
    op.create_index('ix_organization_users_organization_id', 'organization_users', ['organization_id'])

    op.create_table(
        'sso_configs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('sso', sa.Enum('GOOGLE', 'GIT', 'OPENID', name='sso_type'), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('configs', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_sso_configs'),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_sso_configs_organization_id_organizations', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('organization_id', 'sso', name='uq_sso_configs_organization_id'),
    )
    op.create_index('ix_sso_configs_id', 'sso_configs', ['id'])
    op.create_index('ix_sso_configs_organization_id', 'sso_configs', ['organization_id'])

    op.create_table(
        'group_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('organization_id', sa.Integer(), nullable=False),
        sa.Column('group', sa.String(length=255), nullable=False),
        sa.Column('app_create', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('app_delete', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('folder_create', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_group_permissions'),
        sa.ForeignKeyConstraint(
            ['organization_id'], ['organizations.id'],
            name='fk_group_permissions_organization_id_organizations', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('organization_id', 'group', name='uq_group_permissions_organization_id'),
    )
    op.create_index('ix_group_permissions_id', 'group_permissions', ['id'])
    op.create_index('ix_group_permissions_organization_id', 'group_permissions', ['organization_id'])

    op.create_table(
        'user_group_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('group_permission_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_user_group_permissions'),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name='fk_user_group_permissions_user_id_users', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['group_permission_id'], ['group_permissions.id'],
            name='fk_user_group_permissions_group_permission_id_group_permissions', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('user_id', 'group_permission_id', name='uq_user_group_permissions_user_id'),
    )
    op.create_index('ix_user_group_permissions_id', 'user_group_permissions', ['id'])
    op.create_index('ix_user_group_permissions_user_id', 'user_group_permissions', ['user_id'])
    op.create_index(
        'ix_user_group_permissions_group_permission_id', 'user_group_permissions', ['group_permission_id']
    )

    op.create_table(
        'app_group_permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('group_permission_id', sa.Integer(), nullable=False),
        sa.Column('app_id', sa.String(length=64), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('update', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('delete', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_app_group_permissions'),
        sa.ForeignKeyConstraint(
            ['group_permission_id'], ['group_permissions.id'],
            name='fk_app_group_permissions_group_permission_id_group_permissions', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('group_permission_id', 'app_id', name='uq_app_group_permissions_group_permission_id'),
    )
    op.create_index('ix_app_group_permissions_id', 'app_group_permissions', ['id'])
    op.create_index(
        'ix_app_group_permissions_group_permission_id', 'app_group_permissions', ['group_permission_id']
    )

    op.create_table(
        'instance_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=255), nullable=False),
        sa.Column('value', sa.String(length=1024), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_instance_settings'),
    )
    op.create_index('ix_instance_settings_id', 'instance_settings', ['id'])
    op.create_index('ix_instance_settings_key', 'instance_settings', ['key'], unique=True)


def downgrade() -> None:
    """Drop all sign-in tables."""
    op.drop_table('instance_settings')
    op.drop_table('app_group_permissions')
    op.drop_table('user_group_permissions')
    op.drop_table('group_permissions')
    op.drop_table('sso_configs')
    op.drop_table('organization_users')
    op.drop_table('users')
    op.drop_table('organizations')

    op.execute('DROP TYPE IF EXISTS sso_type')
    op.execute('DROP TYPE IF EXISTS membership_status')
    op.execute('DROP TYPE IF EXISTS user_type')
    op.execute('DROP TYPE IF EXISTS user_status')
